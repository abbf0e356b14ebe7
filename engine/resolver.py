# resolver.py – derive the answer and the submission destination
#
# Both chains are ordered lists of small functions. Each returns None when it
# does not apply; the first non-None result wins and later rules never run.

import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from engine.models import SENTINEL_ANSWER

logger = logging.getLogger(__name__)

NUMBER = re.compile(r"[-+]?[0-9]*\.?[0-9]+")
SUBMIT_KEYS = ("submit", "url", "endpoint")

# Marks "rule applies and its answer is None" apart from "rule does not apply".
_NO_ANSWER = object()


# -------- Answer rules ----------
def _finite(value: float) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


def _to_number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value if _finite(value) else 0
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            pass
        try:
            f = float(s)
        except ValueError:
            return 0
        return f if _finite(f) else 0
    return 0


def _parse_match(text: str) -> Optional[float]:
    if "." not in text:
        try:
            return int(text)
        except ValueError:
            # past the int conversion digit limit
            pass
    value = float(text)
    return value if _finite(value) else None


def _total(values: List[float]) -> Any:
    # finite values can still overflow once added up, or mix a huge int into a float
    try:
        total = sum(values)
    except OverflowError:
        return _NO_ANSWER
    return total if _finite(total) else _NO_ANSWER


def sum_table(decoded: Optional[Dict[str, Any]], page_text: str) -> Any:
    if not decoded or not isinstance(decoded.get("table"), list):
        return _NO_ANSWER
    return _total([_to_number(row.get("value")) for row in decoded["table"] if isinstance(row, dict)])


def direct_answer(decoded: Optional[Dict[str, Any]], page_text: str) -> Any:
    if not decoded or "answer" not in decoded:
        return _NO_ANSWER
    return decoded["answer"]


def sum_numbers_in_text(decoded: Optional[Dict[str, Any]], page_text: str) -> Any:
    values = [v for v in map(_parse_match, NUMBER.findall(page_text or "")) if v is not None]
    if not values:
        return _NO_ANSWER
    return _total(values)


def sentinel(decoded: Optional[Dict[str, Any]], page_text: str) -> Any:
    return SENTINEL_ANSWER


AnswerRule = Callable[[Optional[Dict[str, Any]], str], Any]

ANSWER_RULES: Sequence[AnswerRule] = (
    sum_table,
    direct_answer,
    sum_numbers_in_text,
    sentinel,
)


def resolve_answer(
    decoded: Optional[Dict[str, Any]],
    page_text: str,
    rules: Sequence[AnswerRule] = ANSWER_RULES,
) -> Tuple[Any, str]:
    """Return (answer, name of the rule that produced it)."""
    for rule in rules:
        answer = rule(decoded, page_text)
        if answer is not _NO_ANSWER:
            logger.info("Answer resolved via %s", rule.__name__)
            return answer, rule.__name__
    return SENTINEL_ANSWER, sentinel.__name__


# -------- Destination sources ----------
def _absolute(value: Any, page_url: str) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return urljoin(page_url, value.strip())


def payload_submit_target(decoded: Optional[Dict[str, Any]], html: str, page_url: str) -> Optional[str]:
    if not decoded:
        return None
    for key in SUBMIT_KEYS:
        target = _absolute(decoded.get(key), page_url)
        if target:
            return target
    return None


def form_action(decoded: Optional[Dict[str, Any]], html: str, page_url: str) -> Optional[str]:
    soup = BeautifulSoup(html or "", "html.parser")
    form = soup.find("form")
    if form is None:
        return None
    return _absolute(form.get("action"), page_url)


def submit_link(decoded: Optional[Dict[str, Any]], html: str, page_url: str) -> Optional[str]:
    soup = BeautifulSoup(html or "", "html.parser")
    link = soup.select_one("a#submit")
    if link is None:
        return None
    return _absolute(link.get("href"), page_url)


DestinationSource = Callable[[Optional[Dict[str, Any]], str, str], Optional[str]]

DESTINATION_SOURCES: List[DestinationSource] = [
    payload_submit_target,
    form_action,
    submit_link,
]


def resolve_destination(
    decoded: Optional[Dict[str, Any]],
    html: str,
    page_url: str,
    sources: Sequence[DestinationSource] = DESTINATION_SOURCES,
) -> Optional[str]:
    for source in sources:
        try:
            target = source(decoded, html, page_url)
        except Exception as e:
            logger.debug("Destination source %s failed: %s", source.__name__, e)
            continue
        if target:
            logger.info("Destination resolved via %s: %s", source.__name__, target)
            return target
    logger.info("No destination found")
    return None
