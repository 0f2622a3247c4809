"""地图门票价格采集引擎"""

from .consent import ConsentDismisser
from .harvester import LinkHarvester
from .panel import PanelNavigator
from .prices import PriceExtractor, match_price
from .runner import RunOrchestrator, run_places
from .search import PlaceSearchController

__all__ = [
    "ConsentDismisser",
    "LinkHarvester",
    "PanelNavigator",
    "PriceExtractor",
    "match_price",
    "PlaceSearchController",
    "RunOrchestrator",
    "run_places",
]
