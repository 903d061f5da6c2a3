# utils/excel_utils.py

import math
import pandas as pd
from io import BytesIO, StringIO
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

def clean_value(value):
    """Replace None, NaN and Infinity with an empty cell."""
    if value is None:
        return ""
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return ""
    return value

def rows_to_dataframe(rows, headers):
    """
    Build a DataFrame holding only the given headers, in order.
    Missing or null values become empty strings.
    """
    # Object dtype keeps ints from being widened to floats next to blanks
    data = [[clean_value(row.get(header)) for header in headers] for row in rows]
    return pd.DataFrame(data, columns=headers, dtype=object)

def create_csv_from_rows(rows, headers):
    """Render rows as CSV text with the given header line."""
    output = StringIO()
    rows_to_dataframe(rows, headers).to_csv(output, index=False)
    return output.getvalue()

HEADER_FILL = PatternFill(start_color="D3D3D3", end_color="D3D3D3", fill_type="solid")
THIN = Side(style='thin')
CELL_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)

def style_header_row(worksheet, headers, rows_count):
    """Bold, shaded header cells; widen each column to fit its longest value."""
    for col_idx, header in enumerate(headers, start=1):
        cell = worksheet.cell(row=1, column=col_idx)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal='center')
        cell.fill = HEADER_FILL

        widest = len(str(header))
        for row_idx in range(2, rows_count + 2):
            value = worksheet.cell(row=row_idx, column=col_idx).value
            if value:
                widest = max(widest, len(str(value)))
        worksheet.column_dimensions[get_column_letter(col_idx)].width = max(15, widest + 2)

def add_table_styling(worksheet, rows_count, cols_count):
    """Border every cell of the table and right-align numbers."""
    for row in worksheet.iter_rows(min_row=1, max_row=rows_count + 1, max_col=cols_count):
        for cell in row:
            cell.border = CELL_BORDER
            if isinstance(cell.value, (int, float)) and not isinstance(cell.value, bool):
                cell.alignment = Alignment(horizontal="right")

def create_excel_from_rows(rows, headers, sheet_title="Export"):
    """
    Create an Excel file from row dictionaries.

    Args:
        rows: List of dicts keyed by header
        headers: Column names, in output order
        sheet_title: Name of the worksheet

    Returns:
        BytesIO containing the Excel file
    """
    df = rows_to_dataframe(rows, headers)

    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_title)
        worksheet = writer.sheets[sheet_title]
        style_header_row(worksheet, headers, len(df))
        add_table_styling(worksheet, len(df), len(headers))

    output.seek(0)
    return output
