"""Spreadsheet parsing utilities."""
from io import BytesIO
from typing import Any, Dict, List
import pandas as pd


def parse_first_sheet(content: bytes) -> pd.DataFrame:
    """Parse the first worksheet of an xlsx/xls workbook.

    Cells are read as text so that answer keys like ``A,B`` or numeric option
    labels are not coerced.

    Args:
        content: File content as bytes

    Returns:
        Parsed DataFrame whose columns come from the header row
    """
    return pd.read_excel(BytesIO(content), sheet_name=0, dtype=str)


def dataframe_to_dict_list(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert DataFrame to list of dictionaries.

    Args:
        df: DataFrame

    Returns:
        List of row dictionaries, empty cells as None; fully blank rows are skipped
    """
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")
