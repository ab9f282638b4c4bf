"""
Global settings for eggviz. Read at call time, so they can be changed after import.
"""

# Symbols starting with this prefix are pattern variables in rewrite rules.
GENERIC_PREFIX = "p"

# Color e-nodes by their class with a fixed color wheel instead of the vis-network group palette.
COLOR_BY_CLASS = False

CANVAS_HEIGHT = "600px"

PHYSICS = {
    "solver": "barnesHut",
    "barnesHut": {
        "gravitationalConstant": -2000,
        "theta": 0.25,
        "centralGravity": 0.25,
        "springLength": 100,
        "springConstant": 0.04,
        "damping": 0.35,
        "avoidOverlap": 0,
    },
}

CLASS_VERTEX_STYLE = {"shape": "circle", "size": 50, "font": "30px sans-serif black"}
NODE_VERTEX_STYLE = {"shape": "box", "font": "20px sans-serif black", "margin": 15}
MEMBERSHIP_EDGE_STYLE = {"width": 3}
CHILD_EDGE_STYLE = {"arrows": "to"}
