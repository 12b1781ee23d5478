#!/usr/bin/env python3
"""Run the menu structurer on sample page text, without touching the website.

Useful when tuning the prompt or trying another provider/model: the text
goes straight to the configured structurer and the validated record is
printed with a short summary. Nothing is cached.

Usage:
    python scripts/check_structurer.py
    python scripts/check_structurer.py --text-file page.txt --meal dinner
    STRUCTURER_PROVIDER=ollama python scripts/check_structurer.py
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from liondine.ai import LLMStructurer
from liondine.config import settings
from liondine.errors import MenuServiceError
from liondine.models import VALID_CATEGORIES, MealCategory, MenuRecord, parse_category
from liondine.pipeline.ports import MenuStructurer

SAMPLE_BREAKFAST_TEXT = """
Lion Dine Breakfast Lunch Dinner Late Night
Johnny's food truck will be closed until Friday
Ferris 7:30 AM to 11:00 AM
Main Line Apple Pancakes Scrambled Eggs Roasted Breakfast Potatoes Sliced Ham
Turkey Sausage Biscuits and Sausage Gravy
Vegan Station Tofu Scramble Ratatouille Beyond Sausage
JJ's 12:00 AM to 10:00 AM No data available.
Faculty House Closed for breakfast
Grace Dodge Closed for breakfast
Johnny's Closed for breakfast
Fac Shack Closed for breakfast
John Jay 9:30 AM to 11:00 AM
Soup Station Oatmeal Strawberries and Cream Grits
Main Line Scramble Eggs Egg White Scramble Funfetti Pancakes Spinach and Yellow Peppers
Breakfast Potatoes Corned Beef
Vegan Station Tofu Scramble Vegan Sausage Spinach and Yellow Peppers
Hewitt 7:30 AM to 10:00 AM
500 Degrees Veggie Breakfast Pizza Breakfast Pizza
Homestyle Waffles Buttermilk Pancakes Home Fries with Onions & Peppers Turkey Bacon
Flame Scrambled Eggs Hard Boiled Eggs
Performance Kitchen Scrambled Eggs Turkey Bacon Tofu Scramble
The Sweet Shoppe Double Chocolate Chip Muffin Blueberry Muffin
Chef Mike's Closed for breakfast
Diana 9:00 AM to 3:00 PM
Homestyle scrambled eggs French Toast Belgian Waffle Breakfast Potatoes
Breakfast Grill Brioche Bun cage-free fried egg Bacon Turkey Bacon
Oatmeal Bar Hard Boiled Egg Steel Cut Oatmeal
Chef Don's 8:00 AM to 11:00 AM
Sandwiches Bacon egg and cheese bagel Ham egg and cheese bagel Vegan breakfast bagel
Sides Cup of oatmeal Piece of fruit Danish pastry Small coffee or tea
"""


async def check(structurer: MenuStructurer, text: str, meal: MealCategory) -> MenuRecord:
    """Structure ``text`` and validate the result as a menu record.

    Raises:
        StructuringFailed: If the structurer fails
        SchemaInvalid: If its output is not a valid menu record
    """
    payload = await structurer.structure(text, meal)
    return MenuRecord.from_payload(payload, meal)


def summarize(record: MenuRecord) -> dict[str, int]:
    """Hall counts for a structured record."""
    total = len(record.dining_halls)
    open_count = len(record.open_halls())
    return {"total": total, "open": open_count, "closed": total - open_count}


def main() -> int:
    """Main entry point for the structurer check."""
    parser = argparse.ArgumentParser(
        description="LionDine: structure sample menu text with the configured LLM",
    )
    parser.add_argument(
        "--meal",
        choices=VALID_CATEGORIES,
        default="breakfast",
        help="Meal the text belongs to (default: breakfast)",
    )
    parser.add_argument(
        "--text-file",
        type=Path,
        default=None,
        help="Read page text from this file instead of the built-in sample",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    text = args.text_file.read_text(encoding="utf-8") if args.text_file else SAMPLE_BREAKFAST_TEXT
    meal = parse_category(args.meal)

    try:
        structurer = LLMStructurer.from_settings(settings)
        logger.info("Structuring %d chars of %s text with %s", len(text), meal.value, structurer.provider)
        record = asyncio.run(check(structurer, text, meal))
    except MenuServiceError as e:
        logger.error("Structuring failed (%s): %s", e.kind, e.message)
        return 1

    print(record.model_dump_json(by_alias=True, indent=2))
    counts = summarize(record)
    print(f"\nDining halls: {counts['total']} (open {counts['open']}, closed {counts['closed']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
