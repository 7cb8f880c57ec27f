"""
Diary assembly and incremental timeline loading.

- entry_parser: One diary file into a ParsedEntry
- builder: Sorting, quarter grouping, pagination and page JSON output
- timeline: Async controller that appends later pages on demand
"""
