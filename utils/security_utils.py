import os


class ValidationError(ValueError):
    """Raised when request input does not pass validation."""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or []


def get_env_variable(var_name, default_value=None, required=False):
    """Safely get environment variable with optional default."""
    value = os.environ.get(var_name, default_value)
    if required and value is None:
        raise ValueError(f"Required environment variable {var_name} is not set")
    return value


def validate_positive_id(value, field):
    """Validate a single positive integer id (booleans are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError('Validation failed', [f'{field}: must be a positive integer'])
    return value


def validate_id_list(values, field):
    """
    Validate an ordered list of item ids sent by a reorder request.

    The list must be non-empty, contain only positive integers and hold
    every id once.
    """
    if not isinstance(values, list):
        raise ValidationError('Validation failed', [f'{field}: expected an array'])
    if not values:
        raise ValidationError('Validation failed', [f'{field}: at least one id is required'])

    errors = []
    for index, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            errors.append(f'{field}.{index}: must be a positive integer')
    if errors:
        raise ValidationError('Validation failed', errors)

    if len(set(values)) != len(values):
        raise ValidationError('Validation failed', [f'{field}: ids must be unique'])
    return values


def validate_optional_index(value, field):
    """Validate an optional non-negative insertion index."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError('Validation failed', [f'{field}: must be a non-negative integer'])
    return value
