"""
Harvester Module Entry Point

Allows execution via: python -m apps.harvester
"""

from apps.harvester.harvester import run

if __name__ == "__main__":
    run()
