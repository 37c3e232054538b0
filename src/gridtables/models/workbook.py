"""Sheet and workbook models forming the produced document tree."""

from pydantic import BaseModel, ConfigDict, Field

from .table import Table


class Sheet(BaseModel):
    """A worksheet and the tables detected on it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Sheet name")
    index: int = Field(..., ge=0, description="Position of the sheet in the workbook")
    tables: list[Table] = Field(default_factory=list, description="Tables in detection order")

    @property
    def table_count(self) -> int:
        return len(self.tables)

    def get_table(self, name: str) -> Table | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None


class Workbook(BaseModel):
    """Root of the document tree produced by a read."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description="Path of the source workbook")
    sheets: list[Sheet] = Field(default_factory=list, description="Sheets in workbook order")

    @property
    def sheet_count(self) -> int:
        return len(self.sheets)

    @property
    def table_count(self) -> int:
        return sum(sheet.table_count for sheet in self.sheets)

    def get_sheet(self, name: str) -> Sheet | None:
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None

    def get_table_by_name(self, name: str) -> Table | None:
        """Find a table by name across every sheet."""
        for sheet in self.sheets:
            table = sheet.get_table(name)
            if table is not None:
                return table
        return None

    def get_all_tables(self) -> list[Table]:
        """All tables, in sheet order then detection order."""
        return [table for sheet in self.sheets for table in sheet.tables]


class NamedRange(BaseModel):
    """An Excel defined name pointing at a cell range."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Defined name (e.g., 'SalesData')")
    refers_to: str = Field(..., description="Cell reference (e.g., 'Sheet1!$A$1:$B$10')")
    scope: str = Field("Workbook", description="Owning sheet name, or 'Workbook' when global")

    @property
    def is_global(self) -> bool:
        return self.scope == "Workbook"
