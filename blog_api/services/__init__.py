"""
Use cases that are not plain persistence.

Access tokens, outgoing notifications and the upstream weather client live
here; routers call them instead of talking to the token table, the broker or
the weather API directly.
"""
