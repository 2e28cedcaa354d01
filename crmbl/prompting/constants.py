"""Shared constants for documentation prompts."""

from __future__ import annotations

DEFAULT_PROMPT_FILENAME = "crmbl-prompt.txt"

# Placeholders use upper-case names so templates written as {{NEW_DIRS}} keep working.
DEFAULT_PROMPT_TEMPLATE = """# Directory Documentation Task

Please document the directories listed below. For each one, write a README.md
inside the directory and record its metadata in {{ OUTPUT_PATH }}.

## New Directories ({{ TOTAL_NEW }})
{{ NEW_DIRS }}

## Instructions

1. Read the directory contents and work out:
   - the purpose of the directory
   - its key files and what each one does
   - internal dependencies (other directories) and external packages
   - a complexity rating from 1 to 5
   - how often it changes (Stable, Moderate, or Frequently Modified)

2. Write a README.md covering the purpose, key files, dependencies, entry
   points and any architectural notes worth knowing.

3. Add an entry per directory to {{ OUTPUT_PATH }} in this shape:
```json
{
  "purpose": "Brief description of what this directory does",
  "complexity": 3,
  "changeFrequency": "Stable",
  "entryPoints": ["main.py"],
  "internalDeps": ["/other/directory"],
  "externalDeps": ["package-name"],
  "readmePath": "/path/to/README.md",
  "keyFiles": [
    {"file": "filename.py", "description": "What it does"}
  ],
  "subdirectories": ["/path/to/child"]
}
```
{% if README_TEMPLATE %}

## README Template

Follow this structure for each README:

{{ README_TEMPLATE }}
{% endif %}

## Current Configuration
- Root path: {{ ROOT_PATH }}
- Output file: {{ OUTPUT_PATH }}
"""


__all__ = ["DEFAULT_PROMPT_FILENAME", "DEFAULT_PROMPT_TEMPLATE"]
