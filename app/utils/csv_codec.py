# app/utils/csv_codec.py
"""
Customer CSV import / export.

Import rows: installation_number;name;phone;address;latitude;longitude
(';' or ',' separated, detected per line). A first line mentioning
"installation" or "tesisat" is treated as a header. Surrounding quotes are
stripped; a line with unbalanced quotes is split on the separator as is.
Lines with fewer than two columns are skipped.

Export: ';' separated, fixed header, name and address double-quoted.
The BOM is added by the download endpoint for spreadsheet compatibility.
"""

import csv
from typing import Iterable

from app.schemas.customer import Customer

BOM = "\ufeff"
HEADER_KEYWORDS = ("installation", "tesisat")
EXPORT_HEADER = "Installation No;Name;Phone;Address;Latitude;Longitude"


def _is_header(line: str) -> bool:
    lowered = line.lower()
    return any(k in lowered for k in HEADER_KEYWORDS)


def _split(line: str) -> list[str]:
    separator = ";" if ";" in line else ","
    if line.count('"') % 2:
        # unbalanced quotes: plain split, one field per separator
        return [f.strip().strip('"').strip() for f in line.split(separator)]
    fields = next(csv.reader([line], delimiter=separator, skipinitialspace=True), [])
    return [f.strip() for f in fields]


def parse_customer_csv(text: str) -> list[Customer]:
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = text.replace("\r\n", "\n").split("\n")

    start = 1 if lines and _is_header(lines[0]) else 0
    customers: list[Customer] = []
    for line in lines[start:]:
        line = line.strip()
        if not line:
            continue
        cols = _split(line)
        if len(cols) < 2:
            continue
        cols += [""] * (6 - len(cols))
        customers.append(Customer(
            installation_number=cols[0],
            name=cols[1],
            phone=cols[2],
            address=cols[3],
            latitude=cols[4],
            longitude=cols[5],
        ))
    return customers


def _quoted(value) -> str:
    return '"' + str(value or "").replace('"', '""') + '"'


def _plain(value) -> str:
    return "" if value is None else str(value)


def export_customers_csv(rows: Iterable[dict]) -> str:
    """rows are raw customers table rows."""
    lines = [EXPORT_HEADER]
    for row in rows:
        lines.append(";".join([
            _plain(row.get("installation_number")),
            _quoted(row.get("name")),
            _plain(row.get("phone")),
            _quoted(row.get("address")),
            _plain(row.get("latitude")),
            _plain(row.get("longitude")),
        ]))
    return "\n".join(lines) + "\n"
