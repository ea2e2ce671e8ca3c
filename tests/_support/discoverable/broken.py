"""Fails to import; discovery logs it and carries on."""

raise ImportError("this module is broken on purpose")
