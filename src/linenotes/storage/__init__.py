"""Annotation storage.

Layout of the annotation repository:
    <repo>/
    ├── README.md                          # Written once, at repository init
    ├── myproject_3f2a9c0d1e4b5a67/
    │   └── annotations.json               # {"version": "1.0", "annotations": [...]}
    └── other-project_0b1c2d3e4f5a6b7c/
        └── annotations.json

Directory names come from ``linenotes.paths.project_dir_name``.
"""
