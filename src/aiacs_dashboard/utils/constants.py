"""
Constants used throughout the AIACS dashboard
"""

# Compass buckets in clockwise order starting at north
DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# Polling intervals (seconds)
CLOCK_INTERVAL = 1
LEFT_PANEL_INTERVAL = 30  # Weather and bird activity
DETECTIONS_INTERVAL = 30  # Recent detection list
RIGHT_PANEL_INTERVAL = 300  # Daily stats and species
DIRECTION_PLOT_INTERVAL = 1  # Radar scatter plot
HISTORY_INTERVAL = 300  # Detection history page

# Backend defaults
DEFAULT_TIMEOUT = 30  # Seconds, generous for LTE uplinks
CAMERA_DETAIL_TIMEOUT = 600
BBOX_INFO_TIMEOUT = 20
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0  # Seconds between retries

# Detection list defaults
DEFAULT_PER_PAGE = 20
DEFAULT_SORT = "date_desc"
BBOX_FETCH_WORKERS = 8

# Turbine labels shown in the bird activity panel, indexed by camera id
TURBINE_IDS = {1: "SG-01", 2: "SG-02", 3: "SG-03"}

# Species chart palette
SPECIES_COLORS = ("#4caf50", "#ff9800", "#2196f3", "#f44336", "#9c27b0", "#607d8b")
MAX_SPECIES = 6

# Site defaults
DEFAULT_LOCATION = "전라남도 영광군 소각시도"
DEFAULT_MAP_CENTER = (35.193097, 126.221395)
DEFAULT_CAMERA_POSITION = (35.192962, 126.221627)
FEELS_LIKE_OFFSET = 3.0

# NVR playback defaults
DEFAULT_NVR_CHANNEL = 5
DEFAULT_NVR_IP = "192.168.219.102"
DEFAULT_NVR_PORT = 80
DEFAULT_NVR_USERNAME = "admin"

# Output
DEFAULT_OUTPUT_DIR = "dashboard_out"
DEFAULT_SERVER_PORT = 8086

# Environment variables
ENV_API_BASE_URL = "AIACS_API_BASE_URL"
ENV_API_TOKEN = "AIACS_API_TOKEN"
