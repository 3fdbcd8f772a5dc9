"""
Installation feature.

Pending purchase orders, the installation checklist form, encrypted drafts
and the completion call to the installer API.
"""
