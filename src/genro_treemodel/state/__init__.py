# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""State engines for the four node projections.

Each module answers queries against a state set (the live one or a
hypothetical copy) and offers a preview/commit pair:

- checked: checked and indeterminate, derived through the hierarchy
- expanded: expansion with sibling mutex and ancestor expansion
- activated: single or multiple activation
- visibility: expansion chain or filter match
"""
