"""Formal planning invariants.

This file documents what each planning stage MUST produce. Use it as a
reviewer anchor and system reference.
"""

PLANNING_INVARIANTS = {
    "selection": [
        "A record matches a selector iff it matches at least one term",
        "A record matches a term iff it satisfies every constraint of the term",
        "An empty selector matches every record",
        "Every registered condition is evaluated against every record exactly once per pass",
    ],

    "node_plan": [
        "Plan size lies within [min_pool_count, max_pool_count]",
        "Plan entries are unique by (name, uid)",
        "Every plan entry is an eligible node",
        "Observed entries that remain eligible are kept while within bounds",
    ],

    "topology": [
        "Every host carries a positive multiple of the RAID minimum group size",
        "Every RAID group holds exactly the minimum group size",
        "No device appears twice on one host",
        "Observed devices keep their relative order ahead of new devices",
    ],
}

# Which stages run on every plan() call
STAGE_REQUIREMENTS = {
    "selection": "REQUIRED",
    "node_plan": "REQUIRED",
    "topology": "REQUIRED",
}
