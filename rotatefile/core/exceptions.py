"""
Exception hierarchy for rotatefile.

Every error raised by the package derives from RotateFileError and carries
a machine-readable code plus a context dict, so callers can log failures
uniformly without parsing messages.
"""

from typing import Optional, Any, Dict


class RotateFileError(Exception):
    """
    Root of the rotatefile exception hierarchy.

    Attributes:
        message (str): What went wrong
        error_code (str): Stable code for grouping errors in logs
        context (Dict[str, Any]): Paths, sizes and other details of the failure
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


class ConfigurationError(RotateFileError):
    """
    Raised for unusable settings: LOG_* values that do not parse, a
    configuration that fails validation, or no writable log directory.
    """

    def __init__(
        self,
        message: str,
        invalid_values: Optional[Dict[str, Any]] = None,
        validation_errors: Optional[list] = None,
        env_file_path: Optional[str] = None
    ):
        context = {}
        if invalid_values:
            context['invalid_values'] = invalid_values
        if validation_errors:
            context['validation_errors'] = validation_errors
        if env_file_path:
            context['env_file_path'] = env_file_path

        super().__init__(message, "CONFIG_ERROR", context)
        self.invalid_values = invalid_values or {}
        self.validation_errors = validation_errors or []
        self.env_file_path = env_file_path

    def get_troubleshooting_message(self) -> str:
        """Multi-line explanation listing each bad value and the accepted forms."""
        message = [f"Configuration Error: {self.message}"]

        if self.invalid_values:
            message.append("\nRejected LOG_* values:")
            for key, value in self.invalid_values.items():
                message.append(f"  - {key}: {value}")
            message.append("\nSizes accept forms like '100MB' or '64 KiB'; "
                           "booleans accept yes/no, on/off, true/false, 1/0.")

        if self.validation_errors:
            message.append("\nValidation failures:")
            for error in self.validation_errors:
                message.append(f"  - {error}")

        if self.env_file_path:
            message.append(f"\nLoaded from: {self.env_file_path}")

        return "\n".join(message)


class ValidationError(RotateFileError):
    """
    Raised by RotateConfig.validate for a field with the wrong type or sign.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        expected_type: Optional[str] = None,
        actual_value: Optional[Any] = None
    ):
        context = {}
        if field_name:
            context['field_name'] = field_name
        if expected_type:
            context['expected_type'] = expected_type
        if actual_value is not None:
            context['actual_value'] = str(actual_value)
            context['actual_type'] = type(actual_value).__name__

        super().__init__(message, "VALIDATION_ERROR", context)
        self.field_name = field_name
        self.expected_type = expected_type
        self.actual_value = actual_value


class WriteTooLargeError(RotateFileError):
    """
    Raised when a single write is larger than the maximum file size.

    The write is rejected before any state changes; no bytes are written
    and no rotation takes place.
    """

    def __init__(self, write_len: int, max_size: int):
        super().__init__(
            f"write length {write_len} exceeds maximum file size {max_size}",
            "WRITE_TOO_LARGE",
            {'write_len': write_len, 'max_size': max_size}
        )
        self.write_len = write_len
        self.max_size = max_size


class RotationError(RotateFileError):
    """
    Raised when a filesystem operation on the write or rotation path fails.

    This includes failures to create the log directory, stat, open, rename,
    write or sync the active log file.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        context = {}
        if file_path:
            context['file_path'] = file_path
        if operation:
            context['operation'] = operation
        if original_error:
            context['original_error'] = str(original_error)
            context['original_error_type'] = type(original_error).__name__

        super().__init__(message, "ROTATION_ERROR", context)
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class CompressionError(RotationError):
    """
    Raised when compressing a backup fails.

    The source file is always left untouched and any partially written
    destination is removed before this is raised.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        destination: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, file_path, "compress", original_error)
        self.error_code = "COMPRESSION_ERROR"
        self.destination = destination

        if destination:
            self.context['destination'] = destination


class MillError(RotateFileError):
    """
    Raised when a retention pass cannot run at all.

    Individual delete or compress failures do not raise; they are collected
    on the pass report. This is only raised when the backup listing itself
    is unavailable.
    """

    def __init__(
        self,
        message: str,
        directory: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        context = {}
        if directory:
            context['directory'] = directory
        if operation:
            context['operation'] = operation
        if original_error:
            context['original_error'] = str(original_error)
            context['original_error_type'] = type(original_error).__name__

        super().__init__(message, "MILL_ERROR", context)
        self.directory = directory
        self.operation = operation
        self.original_error = original_error
