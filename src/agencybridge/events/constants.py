"""Constants for event codes and the Redis event bus."""

# Stream names
STREAM_MAIN = "agencybridge:events"

# Envelope content type
JSON_CONTENT_TYPE = "application/json"

# Event code suffixes; full codes are "<namespace>.<suffix>"
REGISTRATION_RECEIVED = "registration.received"
REGISTRATION_ENABLED = "registration.enabled"
REGISTRATION_DISABLED = "registration.disabled"
ASSET_SYNC_NEW = "assetsync.new"
ASSET_SYNC_UPDATE = "assetsync.update"
ASSET_SYNC_DELETE = "assetsync.delete"
WORKFRONT_TASK_CREATED = "workfront.task.created"
WORKFRONT_TASK_UPDATED = "workfront.task.updated"
WORKFRONT_TASK_COMPLETED = "workfront.task.completed"

# Context objects injected into event data
INJECT_APP_RUNTIME_INFO = "app_runtime_info"
INJECT_AGENCY_IDENTIFICATION = "agency_identification"

# Inbound brand events with this prefix skip the shared-secret check
INBOUND_REGISTRATION_PREFIX = "com.adobe.b2a.registration."
