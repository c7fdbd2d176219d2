# Colors are (B, G, R, A), the channel order cv2.imread produces.

# Palette of legend colors (generated from the radar legend)
PALETTE: tuple[tuple[int, int, int, int], ...] = (
    (0, 0, 95, 255),
    (0, 0, 255, 255),
    (0, 68, 136, 255),
    (0, 102, 204, 255),
    (0, 152, 0, 255),
    (90, 194, 0, 255),
    (95, 63, 63, 255),
    (116, 0, 0, 255),
    (127, 85, 255, 255),
    (127, 170, 255, 255),
    (128, 255, 255, 255),
    (147, 255, 70, 255),
    (177, 170, 156, 255),
    (199, 0, 199, 255),
    (255, 56, 1, 255),
    (255, 85, 255, 255),
    (255, 136, 62, 255),
    (255, 170, 255, 255),
    (255, 198, 162, 255),
)

# Coincides with the color of roads: kept on the map, never used as a fill
BAD_PALETTE_COLOR = (0, 68, 136, 255)

# Reference colors of the scanner rendering
BACKGROUND_OUTER = (164, 160, 160, 255)
BACKGROUND_INNER = (208, 208, 208, 255)
LINE_COLOR = (115, 115, 115, 255)
BOUNDARY_COLOR = (128, 0, 0, 255)
BLACK = (0, 0, 0, 255)
TRANSPARENT = (0, 0, 0, 0)

# Color tolerances (sum of absolute channel differences)
TIGHT_EPS = 2
LOOSE_EPS = 10
ROAD_EPS = 50

# Source rendering
CROP_RECT = (185, 54, 1180, 960)  # x, y, width, height
BASE_PIXELS_PER_RADIAN = 12750.0
DEFAULT_GRID_SPACING = 120

# Center detection
BACKGROUND_WINDOW = 50
CANDIDATE_RATIO = (7, 10)

# Output
TARGET_HEIGHT = 1000
PNG_COMPRESSION = 9
CENTER_MARKER_COLOR = (255, 0, 255, 255)

# Projections
GEODETIC_PROJ = "+proj=longlat +datum=WGS84 +no_defs"
LOCAL_PROJ_TEMPLATE = "+proj=aeqd +R=1 +x_0=0 +y_0=0 +lon_0={lon:.15g} +lat_0={lat:.15g}"
GLOBAL_PROJ = "EPSG:3857"
