"""
Memos Periodic

Create periodic notes from templates and import Memos records into daily notes
of an Obsidian vault.

Modules:
- config: Settings loading and persistence
- memos_client: Fetch memos and resources from the Memos API (v1, v2)
- record_formatter: Convert memo records to daily note markdown
- vault: File, folder and frontmatter operations on the vault
- periodic_notes: Resolve and create daily/weekly/monthly/quarterly/yearly notes
- daily_record: Import memos into daily notes
"""

__version__ = "0.1.0"
