"""Tiered brain memory.

Layout:
    ~/.claude/brain/
    ├── user.md                        # T1: who the user is (40 lines)
    ├── preferences.md                 # T1: code & tool preferences (40 lines)
    └── projects/
        └── <project-id>/
            ├── context.md             # T2: current project context (120 lines)
            └── archive/
                └── 2026-02-18-143005.md   # T3: one file per session summary

T1 and T2 are loaded into every session; T3 is only pruned or searched.
The project ID comes from `<project-root>/.brain-id`, see `cc_brain.project_id`.
"""
