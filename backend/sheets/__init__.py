"""
Google Sheets operations for the classroom workbook.
"""
