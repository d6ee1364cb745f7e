# e2e/map_e2e/selectors/map_selectors.py

HEADER_SELECTOR = "header"

# Mapbox GL: container div and the WebGL canvas inside it
MAP_CONTAINER_SELECTOR = ".mapboxgl-map"
MAP_CANVAS_SELECTOR = ".mapboxgl-canvas"
MAP_SURFACE_SELECTOR = ".mapboxgl-map, .mapboxgl-canvas"

ZOOM_IN_SELECTOR = ".mapboxgl-ctrl-zoom-in"
ZOOM_OUT_SELECTOR = ".mapboxgl-ctrl-zoom-out"

# Category filter buttons (accessible names)
FILTER_NAME_PATTERN = r"pool|fitness|family|dining|waterpark"
FILTER_CATEGORIES = [
    "Pool & beach",
    "Fitness",
    "Family activities",
    "Dining",
    "Waterparks",
]

# "123 venues" heading above the list
VENUE_HEADING_SELECTOR = "h2, h3, [class*='count'], [class*='heading']"
VENUE_HEADING_TEXT_PATTERN = r"\d+.*venue"

LOADING_VENUES_TEXT = "Loading venues..."
SHOW_VENUES_PATTERN = r"show.*venue"

VENUE_IMAGE_SELECTOR = "img[src*='prismic'], img[src*='venue'], img[alt]"

JOIN_PATTERN = r"join"
JOIN_NOW_PATTERN = r"join now"

NAV_PATTERNS = [
    r"pool.*beach",
    r"gym|fitness",
    r"family",
    r"dining",
]

# Burger menu on small screens; markup differs between releases, so several candidates
MENU_TOGGLE_SELECTOR = (
    'button[aria-label*="menu" i], '
    'button[aria-label*="nav" i], '
    '[class*="hamburger" i], '
    '[class*="menu-toggle" i], '
    '[class*="MenuToggle"], '
    "header button"
)

MOBILE_VIEWPORT = {"width": 375, "height": 812}
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)

HORIZONTAL_OVERFLOW_JS = "() => document.documentElement.scrollWidth > window.innerWidth"

NAVIGATION_TIMING_JS = """() => {
  const nav = performance.getEntriesByType("navigation")[0];
  if (!nav) return null;
  return {
    domContentLoaded: nav.domContentLoadedEventEnd - nav.startTime,
    loadComplete: nav.loadEventEnd - nav.startTime,
    ttfb: nav.responseStart - nav.requestStart,
  };
}"""
