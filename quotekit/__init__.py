"""
Quotation scraping and loading pipeline.

This package scrapes quote and author pages into delimited records, joins
quotes and events onto authors by name signature, and loads the joined
structure into a SQLite database.

See DESIGN.md for how the stages fit together.
"""
