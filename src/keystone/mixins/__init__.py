"""Stock mixins that can be composed into any Component.

    - parenting: spawning of child instances through the class loader
    - configurable: defaulting and type checking of configuration mappings
    - loggable: a per-class logger named after the class identifier
"""
