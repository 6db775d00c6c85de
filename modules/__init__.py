"""
Application Modules.

- backend/: Survey CRM API, services, persistence, integrations and
  notification tasks
"""
