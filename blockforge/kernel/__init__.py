"""
Kernel Layer

Persistent state the generators read from:
- Content records and their raw fields (templates, styles, scripts)
- Block settings and partial scope
- The derived partial-usage relation
"""
