import unittest
from datetime import datetime

from elevate_chat.titles import TITLE_PROMPT_CHARS, derive_title


class DeriveTitleTests(unittest.TestCase):
    def test_long_prompt_is_cut_to_thirty_characters(self) -> None:
        title = derive_title("Explain recursion in simple terms covering edge cases", datetime(2026, 10, 19))
        self.assertEqual("Explain recursion in simple te - Oct 19, 2026", title)
        self.assertEqual(TITLE_PROMPT_CHARS, len(title.split(" - ")[0]))

    def test_short_prompt_is_kept_whole(self) -> None:
        self.assertEqual("Hi - Jan 05, 2025", derive_title("Hi", datetime(2025, 1, 5)))

    def test_same_prompt_same_day_gives_same_title(self) -> None:
        now = datetime(2026, 3, 1, 8, 0)
        self.assertEqual(derive_title("repeat", now), derive_title("repeat", now.replace(hour=22)))


if __name__ == "__main__":
    unittest.main()
