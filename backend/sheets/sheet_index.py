from typing import Dict, Iterable, List, Optional

import gspread

from core.google_client import retry_with_backoff


class SheetIndex:
    """Sheets of a spreadsheet by trimmed title, in tab order."""

    def __init__(self, worksheets: List[gspread.Worksheet]):
        self._worksheets = list(worksheets)
        self._by_name: Dict[str, gspread.Worksheet] = {}
        for worksheet in self._worksheets:
            self._by_name[worksheet.title.strip()] = worksheet

    @classmethod
    def build(cls, spreadsheet: gspread.Spreadsheet) -> 'SheetIndex':
        return cls(retry_with_backoff(spreadsheet.worksheets))

    def __contains__(self, name: str) -> bool:
        return name.strip() in self._by_name

    def __len__(self) -> int:
        return len(self._worksheets)

    def get(self, name: str) -> Optional[gspread.Worksheet]:
        return self._by_name.get(name.strip())

    def names(self) -> List[str]:
        return list(self._by_name)

    def insertion_index_after(self, name: str) -> int:
        """Zero-based tab position right after the named sheet, or the end if it is absent."""
        for position, worksheet in enumerate(self._worksheets):
            if worksheet.title.strip() == name.strip():
                return position + 1
        return len(self._worksheets)

    def missing(self, names: Iterable[str]) -> List[str]:
        """Names without a sheet yet, in the given order and without repeats."""
        result = []
        seen = set()
        for name in names:
            if name in seen or name in self:
                continue
            seen.add(name)
            result.append(name)
        return result
