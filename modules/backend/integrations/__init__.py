# Vendor integrations (Microsoft Graph, Bunny storage)
