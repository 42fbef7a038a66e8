class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORE_ERROR = "STORE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    NOT_FOUND = "NOT_FOUND"

    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    INVALID_STATUS = "INVALID_STATUS"
    QUEUE_ALREADY_ASSIGNED = "QUEUE_ALREADY_ASSIGNED"
    QUEUE_CONFLICT = "QUEUE_CONFLICT"
    NO_ACTIVE_BOOKING = "NO_ACTIVE_BOOKING"

    BRANCH_IN_USE = "BRANCH_IN_USE"
    USER_IN_USE = "USER_IN_USE"
