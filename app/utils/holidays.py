# app/utils/holidays.py
"""
Turkish official public holidays 2024-2030, including half-day eves,
as YYYY-MM-DD strings. The service is closed on every date listed here.
"""

PUBLIC_HOLIDAYS = frozenset({
    # 2024
    "2024-01-01",
    "2024-04-09", "2024-04-10", "2024-04-11", "2024-04-12",               # Ramadan feast
    "2024-04-23", "2024-05-01", "2024-05-19",
    "2024-06-15", "2024-06-16", "2024-06-17", "2024-06-18", "2024-06-19", # Sacrifice feast
    "2024-07-15", "2024-08-30", "2024-10-29",
    # 2025
    "2025-01-01",
    "2025-03-29", "2025-03-30", "2025-03-31", "2025-04-01",
    "2025-04-23", "2025-05-01", "2025-05-19",
    "2025-06-05", "2025-06-06", "2025-06-07", "2025-06-08", "2025-06-09",
    "2025-07-15", "2025-08-30", "2025-10-29",
    # 2026
    "2026-01-01",
    "2026-03-19", "2026-03-20", "2026-03-21", "2026-03-22",
    "2026-04-23", "2026-05-01", "2026-05-19",
    "2026-05-26", "2026-05-27", "2026-05-28", "2026-05-29", "2026-05-30",
    "2026-07-15", "2026-08-30", "2026-10-29",
    # 2027
    "2027-01-01",
    "2027-03-08", "2027-03-09", "2027-03-10", "2027-03-11",
    "2027-04-23", "2027-05-01",
    "2027-05-15", "2027-05-16", "2027-05-17", "2027-05-18", "2027-05-19",
    "2027-07-15", "2027-08-30", "2027-10-29",
    # 2028
    "2028-01-01",
    "2028-02-26", "2028-02-27", "2028-02-28",
    "2028-04-23", "2028-05-01",
    "2028-05-05", "2028-05-06", "2028-05-07", "2028-05-08", "2028-05-09",
    "2028-05-19", "2028-07-15", "2028-08-30", "2028-10-29",
    # 2029
    "2029-01-01",
    "2029-02-14", "2029-02-15", "2029-02-16", "2029-02-17",
    "2029-04-23",
    "2029-04-24", "2029-04-25", "2029-04-26", "2029-04-27", "2029-04-28",
    "2029-05-01", "2029-05-19", "2029-07-15", "2029-08-30", "2029-10-29",
    # 2030
    "2030-01-01",
    "2030-02-03", "2030-02-04", "2030-02-05", "2030-02-06",
    "2030-04-13", "2030-04-14", "2030-04-15", "2030-04-16", "2030-04-17",
    "2030-04-23", "2030-05-01", "2030-05-19", "2030-07-15", "2030-08-30", "2030-10-29",
})
