# ===== TYPES & INTERFACES =====

from typing import TypedDict, List, Optional, Union, Dict, Any

PLATFORMS = ('steam', 'mobile', 'console', 'web', 'indie')
RELEASE_STATES = ('upcoming', 'early_access', 'live')
ARCHETYPES = ('premium_singleplayer', 'f2p_mobile', 'live_service', 'early_stage', 'aa_premium')

FREE = "free"
UNKNOWN_PRICE = "unknown"

# Either the literal "free" or a non-negative number of US dollars
Price = Union[str, float]


class ScrapedData(TypedDict, total=False):
    """
    What pattern extraction alone could infer from a store page's markup.
    Every key is optional; a missing key means no rule matched.

    Attributes:
        price (str): "free", "unknown" or a numeric string such as "19.99".
        lastUpdate (str): Release or last-update date as printed on the page.
    """
    title: str
    description: str
    platform: str
    price: str
    genre: List[str]
    releaseState: str
    isMultiplayer: bool
    reviewScore: int
    reviewCount: int
    lastUpdate: str
    imageUrl: str


class GameMetadata(TypedDict, total=False):
    """
    The normalized record that flows through merge, validation and classification.

    Attributes:
        title (str): Required, 2-200 characters, never the "Unknown Game" sentinel once valid.
        platform (str): Primary channel, one of PLATFORMS.
        platforms (List[str]): Every platform the game ships on, as reported by enrichment.
        price (Price): "free" or a number.
        genre (List[str]): At most three genre/tag names.
        releaseState (str): One of RELEASE_STATES.
        isMultiplayer (bool): True if the store page advertises multiplayer features.
        reviewScore (Optional[int]): Percentage of positive reviews (0-100).
        estimatedOwners / estimatedRevenue / salesMilestone (Optional[str]): Free-text ranges.
        archetype (str): One of ARCHETYPES; always assigned by the classifier.
    """
    # Core fields
    title: str
    description: Optional[str]
    platform: str
    platforms: List[str]
    price: Price
    genre: List[str]
    releaseState: str
    isMultiplayer: bool

    # Enriched fields
    developer: Optional[str]
    publisher: Optional[str]
    reviewScore: Optional[int]
    reviewCount: Optional[int]
    copiesSold: Optional[int]
    peakPlayers: Optional[int]
    currentPlayers: Optional[int]
    estimatedOwners: Optional[str]
    estimatedRevenue: Optional[str]
    salesMilestone: Optional[str]

    # Page metadata
    lastUpdateDate: Optional[str]
    imageUrl: Optional[str]

    # Derived
    archetype: str


class EnrichmentPatch(TypedDict, total=False):
    """Fields the enrichment service answered for. Absent keys were not answered."""
    developer: str
    publisher: str
    platforms: List[str]
    price: Price
    reviewCount: int
    reviewScore: int
    copiesSold: int
    peakPlayers: int
    currentPlayers: int
    estimatedOwners: str
    estimatedRevenue: str
    salesMilestone: str


class EnrichmentResult(TypedDict):
    patch: EnrichmentPatch
    grounded: bool
    sources: List[str]


class Opportunity(TypedDict):
    category: str
    diagnosis: str
    actions: List[str]  # always exactly two
    relevance: str


class CallToAction(TypedDict):
    label: str
    url: str


class GameReport(TypedDict):
    gameContext: GameMetadata
    archetype: str
    archetypeLabel: str
    overallScore: int
    interpretation: str
    opportunities: List[Opportunity]
    callToAction: CallToAction
    gameUrl: str
    timestamp: str


class LeadData(TypedDict, total=False):
    name: str
    email: str
    company: str


class QueuedDelivery(TypedDict):
    """
    A webhook notification that failed immediate delivery.

    Attributes:
        id (str): Generated identifier, e.g. 'webhook_1718000000000_k3j9x0a1b'.
        payload (Dict[str, Any]): The report summary that should have been delivered.
        lead (LeadData): Contact details the payload belongs to.
        timestamp (str): ISO-8601 creation time.
        attempts (int): Number of retry passes that touched this entry.
    """
    id: str
    payload: Dict[str, Any]
    lead: LeadData
    timestamp: str
    attempts: int
