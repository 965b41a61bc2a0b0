"""Query-string to PropertyFilter normalization.

Raw parameters arrive as strings (or not at all). Normalization runs in two
phases: pydantic coerces and validates the fields that are present, then the
inverted-range policy is applied to the typed values. Defaults fill only the
fields that are absent, so an explicit ``offset=0`` or ``is_featured=false``
is kept as given.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from pydantic import ValidationError as PydanticValidationError

from natureestate.core.config import Settings
from natureestate.core.errors import FieldError, ValidationError
from natureestate.models.search import PropertyFilter

logger = logging.getLogger(__name__)

FILTER_FIELDS = frozenset(PropertyFilter.model_fields)

# (lower bound, upper bound) pairs checked under the "reject" policy
RANGE_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("price_min", "price_max"),
    ("square_footage_min", "square_footage_max"),
    ("land_size_min", "land_size_max"),
    ("year_built_min", "year_built_max"),
)


def pydantic_field_errors(exc: PydanticValidationError) -> List[FieldError]:
    """One FieldError per offending field, first message wins"""
    errors: Dict[str, FieldError] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        if field not in errors:
            errors[field] = FieldError(field=field, message=error["msg"])
    return list(errors.values())


def _as_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def find_inverted_ranges(values: Mapping[str, Any], skip: frozenset = frozenset()) -> List[FieldError]:
    """Range pairs whose lower bound exceeds the upper bound"""
    errors = []
    for low_field, high_field in RANGE_PAIRS:
        if low_field in skip or high_field in skip:
            continue
        low = _as_number(values.get(low_field))
        high = _as_number(values.get(high_field))
        if low is not None and high is not None and low > high:
            errors.append(FieldError(
                field=low_field,
                message=f"{low_field} must be less than or equal to {high_field}",
            ))
    return errors


def normalize_property_filter(raw: Mapping[str, Any], settings: Settings) -> PropertyFilter:
    """Validate raw search parameters into an immutable PropertyFilter.

    Raises ValidationError listing every offending field. Unknown parameters
    are ignored.
    """
    params: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in FILTER_FIELDS:
            params[key] = value
        else:
            logger.debug(f"Ignoring unknown search parameter: {key}")

    if "limit" not in params:
        params["limit"] = settings.DEFAULT_PAGE_SIZE

    reject_inverted = settings.INVERTED_RANGE_POLICY == "reject"

    try:
        property_filter = PropertyFilter.model_validate(params)
    except PydanticValidationError as e:
        errors = pydantic_field_errors(e)
        if reject_inverted:
            errors.extend(find_inverted_ranges(params, skip=frozenset(err.field for err in errors)))
        logger.info(f"Rejected search filter: {[err.field for err in errors]}")
        raise ValidationError(errors)

    if reject_inverted:
        errors = find_inverted_ranges(property_filter.model_dump())
        if errors:
            logger.info(f"Rejected inverted ranges: {[err.field for err in errors]}")
            raise ValidationError(errors)

    return property_filter
