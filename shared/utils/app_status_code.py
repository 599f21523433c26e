class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    OPERATION_SUCCESSFUL = "101"
    CREATED_SUCCESSFULLY = "102"
    UPDATED_SUCCESSFULLY = "103"

    # Validation
    INVALID_INPUT = "200"
    REQUIRED_VALIDATION_ERROR = "201"
    DUPLICATE_ADD_ERROR = "202"
    INVALID_DATE_RANGE = "203"
    DURATION_NOT_DIVISIBLE = "204"

    # Contract schedule
    CONTRACT_OVERLAP = "300"
    RESCHEDULE_CONFLICT = "301"
    CONTRACT_STATE_INVALID = "302"
    PAYMENT_STATE_INVALID = "303"
    STALE_STATE = "304"

    # Generic failures
    NOT_FOUND = "404"
    OPERATION_ERROR = "500"
    OPERATION_FAILED = "501"
