from __future__ import annotations

import unittest

from hadith_scraper.normalization import clean_english_text, clean_text, is_arabic, strip_quotes


class CleanTextTests(unittest.TestCase):
    def test_removes_marks_and_collapses_whitespace(self) -> None:
        raw = "\N{RIGHT-TO-LEFT MARK}  Narrated\N{NO-BREAK SPACE}Anas:\n\t The\N{ZERO WIDTH SPACE} Prophet \N{ZERO WIDTH NO-BREAK SPACE}"
        self.assertEqual(clean_text(raw), "Narrated Anas: The Prophet")

    def test_empty_values(self) -> None:
        self.assertEqual(clean_text(""), "")
        self.assertEqual(clean_text(None), "")
        self.assertEqual(clean_text(" \n "), "")

    def test_english_variant_drops_widget_leftovers_and_arabic(self) -> None:
        raw = "The Prophet said: Pray. Report Error | Share | Copy ▼ صلوا"
        self.assertEqual(clean_english_text(raw), "The Prophet said: Pray.")

    def test_english_variant_drops_trailing_reference(self) -> None:
        raw = "Actions are by intentions. Reference : Hadith 1 In-book reference : Book 1"
        self.assertEqual(clean_english_text(raw), "Actions are by intentions.")

    def test_strip_quotes(self) -> None:
        self.assertEqual(strip_quotes('"إنما الأعمال بالنيات"'), "إنما الأعمال بالنيات")
        self.assertEqual(strip_quotes("no quotes"), "no quotes")

    def test_is_arabic(self) -> None:
        self.assertTrue(is_arabic("باب الوضوء"))
        self.assertFalse(is_arabic("Chapter 1"))
        self.assertFalse(is_arabic(None))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
