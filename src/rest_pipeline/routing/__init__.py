"""Routing — the route table and the compiled router built from it.

Controllers are registered into a ``RouteTable`` during setup. The table
is compiled into a trie ``Router`` on first dispatch and recompiled
whenever a registration changes it.
"""
