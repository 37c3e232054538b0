"""Core constants and exceptions for GridTables."""
