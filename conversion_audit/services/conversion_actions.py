"""
Conversion action collection.

Fetches every ENABLED conversion action and turns each row into a
ConversionAction skeleton: static configuration parsed, all metrics zeroed.
A failure here is fatal for the run and is left to propagate to the job.
"""

import logging
from typing import Any, List, Mapping

from conversion_audit.core.data_source import DataSource, get_flag, get_number, get_text
from conversion_audit.models.schemas import ConversionAction
from conversion_audit.queries.gaql_queries import get_conversion_actions_query


logger = logging.getLogger(__name__)


def parse_conversion_action(row: Mapping[str, Any]) -> ConversionAction:
    """
    Build a ConversionAction skeleton from one conversion action row.

    Args:
        row: Flat row from the conversion action list query.

    Returns:
        ConversionAction with configuration set and metrics at zero.
        hasValue is true iff the default value is positive.
    """
    default_value = max(get_number(row, 'conversion_action.value_settings.default_value'), 0.0)

    return ConversionAction(
        id=get_text(row, 'conversion_action.id'),
        name=get_text(row, 'conversion_action.name'),
        status=get_text(row, 'conversion_action.status', 'ENABLED'),
        category=get_text(row, 'conversion_action.category'),
        countingType=get_text(row, 'conversion_action.counting_type'),
        defaultValue=default_value,
        hasValue=default_value > 0,
        includeInConversions=get_flag(row, 'conversion_action.include_in_conversions_metric'),
        isPrimary=get_flag(row, 'conversion_action.primary_for_goal'),
        attributionModel=get_text(
            row, 'conversion_action.attribution_model_settings.attribution_model'
        ),
        type=get_text(row, 'conversion_action.type'),
    )


def collect_conversion_actions(source: DataSource) -> List[ConversionAction]:
    """
    Fetch all enabled conversion actions, in the order the source returns them.

    Raises:
        Exception: Whatever the data source raises; the run cannot continue
            without the conversion action list.
    """
    logger.info("Fetching enabled conversion actions")
    rows = source.query(get_conversion_actions_query())
    actions = [parse_conversion_action(row) for row in rows]
    logger.info(f"Found {len(actions)} enabled conversion actions")
    return actions
