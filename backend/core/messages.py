class ErrorMessage:
    # ---------- Generic ----------
    SERVER_ERROR = "Internal server error"
    DATABASE_FAILURE = "Database operation failed"
    BAD_REQUEST = "Bad request"
    NOT_FOUND = "Requested resource not found"
    CONFLICT = "Request conflicts with the current state of the resource"
    ACCESS_DENIED = "Access denied"

    # ---------- Bookings ----------
    BOOKING_NOT_FOUND = "Booking not found"
    SLOT_ALREADY_BOOKED = "This slot is already booked"
    SLOT_UNAVAILABLE = "This slot is not available for booking"
    COURT_HAS_BOOKINGS = "This court has booked slots and cannot be deleted; deactivate it instead"

    # ---------- Payments ----------
    PAYMENT_ID_REQUIRED = "Payment ID is required"
    PAYMENT_NOT_FOUND = "Payment not found"
    PAYMENT_ALREADY_PENDING = "A payment is already pending for this booking"
    PAYMENT_AMOUNT_INVALID = "Something wrong with the payment amount"
    PAYMENT_ALREADY_VERIFIED = "This payment has already been verified"
    PAID_PAYMENT_IMMUTABLE = "Paid payment cannot be updated"
    PAYMENT_BOOKING_MISMATCH = "Payment does not belong to this booking"
    PAYMENT_STATUS_INVALID = "Unknown payment status"
    PAYMENT_UPLOAD_FORBIDDEN = "You are not authorized to upload payment image for this booking"
    PAYMENT_BOOKING_FORBIDDEN = "You can only pay for your own bookings"
    PAYMENT_UPDATE_FORBIDDEN = "You can only update payments for your own bookings"
    PAYMENT_VERIFIED = "Payment verified successfully"

    CREATE_PAYMENT_FAILED = "Failed to create payment"
    UPDATE_PAYMENT_FAILED = "Failed to update payment"
    FETCH_PAYMENTS_FAILED = "Failed to fetch payments"
    FETCH_PAYMENT_FAILED = "Failed to fetch payment by id"
    UPLOAD_IMAGE_FAILED = "Failed to upload payment image"
    VERIFY_PAYMENT_FAILED = "Failed to verify payment"
    STORE_FILE_FAILED = "Failed to store file"
    RESOLVE_FILE_URL_FAILED = "Failed to resolve file URL"
    DELETE_FILE_FAILED = "Failed to delete stored file"
