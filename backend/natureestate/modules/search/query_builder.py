from typing import List
import logging

from sqlalchemy import ColumnElement, or_
from sqlalchemy.sql.elements import UnaryExpression

from natureestate.db.models import Property as DBProperty
from natureestate.models.search import PropertyFilter, SortBy, SortOrder

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    SortBy.PRICE: DBProperty.price,
    SortBy.CREATED_AT: DBProperty.created_at,
    SortBy.VIEW_COUNT: DBProperty.view_count,
    SortBy.TITLE: DBProperty.title,
    SortBy.SQUARE_FOOTAGE: DBProperty.square_footage,
}


class SearchQueryBuilder:
    """Builds SQL predicates and ordering from a normalized PropertyFilter.

    Each present filter field contributes exactly one independent predicate;
    absent fields contribute nothing.
    """

    def build_predicates(self, criteria: PropertyFilter) -> List[ColumnElement[bool]]:
        """Conjunction of column predicates for the filter"""
        predicates: List[ColumnElement[bool]] = []

        self._add_exact_filters(predicates, criteria)
        self._add_range_filters(predicates, criteria)
        self._add_text_filters(predicates, criteria)
        self._add_feature_filters(predicates, criteria)

        logger.debug(f"Built {len(predicates)} predicates for filter: {criteria.model_dump(exclude_none=True)}")
        return predicates

    def build_ordering(self, criteria: PropertyFilter) -> List[UnaryExpression]:
        """Sort key and direction, then id ascending as the tie-break"""
        column = SORT_COLUMNS[criteria.sort_by]
        if criteria.sort_order == SortOrder.ASC:
            primary = column.asc().nulls_last()
        else:
            primary = column.desc().nulls_last()
        return [primary, DBProperty.id.asc()]

    def _add_exact_filters(self, predicates: List[ColumnElement[bool]], criteria: PropertyFilter):
        """Case-sensitive equality on location, type, status and featured flag"""
        if criteria.country is not None:
            predicates.append(DBProperty.country == criteria.country)
        if criteria.region is not None:
            predicates.append(DBProperty.region == criteria.region)
        if criteria.city is not None:
            predicates.append(DBProperty.city == criteria.city)
        if criteria.property_type is not None:
            predicates.append(DBProperty.property_type == criteria.property_type.value)

        # status always carries a value after normalization
        predicates.append(DBProperty.status == criteria.status.value)

        if criteria.is_featured is not None:
            predicates.append(DBProperty.is_featured == criteria.is_featured)

    def _add_range_filters(self, predicates: List[ColumnElement[bool]], criteria: PropertyFilter):
        """Inclusive bounds; an absent bound leaves that side open"""
        ranges = (
            (DBProperty.price, criteria.price_min, criteria.price_max),
            (DBProperty.square_footage, criteria.square_footage_min, criteria.square_footage_max),
            (DBProperty.land_size, criteria.land_size_min, criteria.land_size_max),
            (DBProperty.year_built, criteria.year_built_min, criteria.year_built_max),
            (DBProperty.bedrooms, criteria.bedrooms_min, None),
            (DBProperty.bathrooms, criteria.bathrooms_min, None),
        )
        for column, low, high in ranges:
            if low is not None:
                predicates.append(column >= low)
            if high is not None:
                predicates.append(column <= high)

    def _add_text_filters(self, predicates: List[ColumnElement[bool]], criteria: PropertyFilter):
        """Free-text search over title/description and the location columns"""
        if criteria.query is not None:
            predicates.append(or_(
                DBProperty.title.icontains(criteria.query, autoescape=True),
                DBProperty.description.icontains(criteria.query, autoescape=True),
            ))

        if criteria.location_text is not None:
            predicates.append(or_(
                DBProperty.country.icontains(criteria.location_text, autoescape=True),
                DBProperty.region.icontains(criteria.location_text, autoescape=True),
                DBProperty.city.icontains(criteria.location_text, autoescape=True),
                DBProperty.address.icontains(criteria.location_text, autoescape=True),
            ))

    def _add_feature_filters(self, predicates: List[ColumnElement[bool]], criteria: PropertyFilter):
        """Substring match against the serialized feature lists"""
        if criteria.natural_features is not None:
            predicates.append(DBProperty.natural_features.icontains(criteria.natural_features, autoescape=True))
        if criteria.outdoor_amenities is not None:
            predicates.append(DBProperty.outdoor_amenities.icontains(criteria.outdoor_amenities, autoescape=True))
