"""Loading of the static ticket-rule document"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..schemas.ticket_rules import TicketRuleEntry, TicketRules

logger = logging.getLogger(__name__)


def parse_ticket_rules(document: Dict[str, Any]) -> TicketRules:
    """
    Validate a ticket-rule document keyed by museum_id

    Entries that fail validation are logged and left out, so those museums
    surface as "rules not available" instead of breaking the whole table.
    """
    rules: TicketRules = {}
    for museum_id, raw in document.items():
        try:
            rules[museum_id] = TicketRuleEntry.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring ticket rules for {museum_id}: {e.error_count()} validation error(s)")
    return rules


def load_ticket_rules(path: Optional[Union[str, Path]] = None) -> TicketRules:
    """
    Load ticket_rules.json

    Args:
        path: Document path, defaults to settings.ticket_rules_path

    Returns:
        Validated rules keyed by museum_id; empty if the file is missing
    """
    path = Path(path or settings.ticket_rules_path)
    if not path.exists():
        logger.warning(f"Ticket rules file not found at {path}; every price will be unknown")
        return {}

    with path.open(encoding="utf-8") as f:
        document = json.load(f)

    if not isinstance(document, dict):
        raise ValueError(f"Ticket rules document {path} must be an object keyed by museum_id")

    rules = parse_ticket_rules(document)
    logger.info(f"Loaded ticket rules for {len(rules)} museums from {path}")
    return rules
