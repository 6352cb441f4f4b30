class AuditEvents:
    # Accounts
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    USER_REGISTERED = "user_registered"

    # Workers
    WORKER_CREATED = "worker_created"
    WORKER_UPDATED = "worker_updated"
    WORKER_DELETED = "worker_deleted"
    WORKER_DELETE_BLOCKED = "worker_delete_blocked"

    # Project owners
    PROJECT_OWNER_CREATED = "project_owner_created"
    PROJECT_OWNER_UPDATED = "project_owner_updated"
    PROJECT_OWNER_DELETED = "project_owner_deleted"
    PROJECT_OWNER_DELETE_BLOCKED = "project_owner_delete_blocked"

    # Projects
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    PROJECT_DELETE_BLOCKED = "project_delete_blocked"
    PROJECT_WORKERS_ASSIGNED = "project_workers_assigned"

    # Ledger-affecting records
    MATERIAL_CREATED = "material_created"
    MATERIAL_UPDATED = "material_updated"
    MATERIAL_DELETED = "material_deleted"
    ATTENDANCE_CREATED = "attendance_created"
    ATTENDANCE_UPDATED = "attendance_updated"
    ATTENDANCE_DELETED = "attendance_deleted"
    ATTENDANCE_DUPLICATE_REJECTED = "attendance_duplicate_rejected"
    SALARY_CREATED = "salary_created"
    SALARY_UPDATED = "salary_updated"
    SALARY_DELETED = "salary_deleted"
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_DELETED = "payment_deleted"

    # Ledger maintenance
    LEDGER_RECONCILED = "ledger_reconciled"
