"""Internal constants shared across the library."""

#: State tick interval used when the configuration does not set one.
DEFAULT_INTERVAL_MS: float = 1000.0

#: Render/update clock of the panel instrument (display refresh rate).
DEFAULT_RENDER_HZ: float = 60.0

#: Seconds to wait for a remote ``simvars.json`` before falling back.
DEFAULT_FETCH_TIMEOUT: float = 10.0

# ------------------------------------------------------------------
# Simulator variable names used by the built-in panel
# ------------------------------------------------------------------

AIRSPEED_INDICATED = "AIRSPEED INDICATED"
FUEL_TOTAL_QUANTITY = "FUEL TOTAL QUANTITY"
FUEL_TOTAL_CAPACITY = "FUEL TOTAL CAPACITY"
FLAPS_HANDLE_INDEX = "FLAPS HANDLE INDEX"
TRAILING_EDGE_FLAPS_LEFT_PERCENT = "TRAILING EDGE FLAPS LEFT PERCENT"
