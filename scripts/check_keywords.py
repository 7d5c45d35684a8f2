#!/usr/bin/env python
"""
Keyword specification check script.

Shows how a keyword specification is parsed and whether it matches a sample
message. Handy for answering "why did (or didn't) I get this notification?".

Usage:
    python scripts/check_keywords.py "[python], remote, senior dev*" "Senior developer, Python, remote"
    python scripts/check_keywords.py "java" "java internship" --ignore "internship"
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from alertbot.filters.expression_parser import parse_expression
from alertbot.filters.keyword_matcher import evaluate_expression, highlight_keywords
from alertbot.filters.validation import UserInputError, validate_keywords
from alertbot.infra.logging.config import setup_logging
from alertbot.nlp.preprocess import normalize_text

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Check a keyword specification against a message")
    parser.add_argument("keywords", help="Include specification, e.g. \"[python], remote\"")
    parser.add_argument("text", help="Message text to check")
    parser.add_argument("--ignore", default=None, help="Ignore (veto) specification")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Validate the specifications like the bot does before saving them",
    )
    args = parser.parse_args()

    # Setup logging
    setup_logging()

    if args.strict:
        try:
            validate_keywords(args.keywords)
            if args.ignore:
                validate_keywords(args.ignore)
        except UserInputError as e:
            logger.error(f"Invalid keywords: {e}")
            return 2

    include = parse_expression(args.keywords)
    ignore = parse_expression(args.ignore) if args.ignore else None
    normalized = normalize_text(args.text)

    logger.info("=== Parsed Expression ===")
    for name, value in include.model_dump().items():
        if value:
            logger.info(f"  {name}: {value}")
    if ignore is not None:
        logger.info(f"  ignore: {ignore.veto_terms()}")

    logger.info("")
    logger.info(f"Normalized text: {normalized!r}")

    result = evaluate_expression(normalized, include, ignore)

    logger.info("")
    logger.info("=== Result ===")
    logger.info(f"  match: {result.is_match}")
    if result.blocked_by_ignore:
        logger.info(f"  blocked by ignore keywords: {result.ignored_keywords}")
    if result.matched_keywords:
        logger.info(f"  matched keywords: {result.matched_keywords}")
        logger.info(f"  {highlight_keywords(args.text, result)}")

    return 0 if result.is_match else 1


if __name__ == "__main__":
    sys.exit(main())
