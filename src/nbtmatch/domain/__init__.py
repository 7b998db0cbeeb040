"""Domain layer: tag trees, ranges, dollar expressions, matching and conditions.

Pure Python with no third-party imports. Nothing here may import from
services, commands, output or config.
"""
