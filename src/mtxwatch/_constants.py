"""Internal constants shared across the library."""

USER_AGENT = "mtxwatch/1"

PATHS_LIST_ENDPOINT = "/paths/list"
PATH_CONFIG_GET_ENDPOINT = "/config/paths/get/{name}"
PATH_CONFIG_ADD_ENDPOINT = "/config/paths/add/{name}"
PATH_CONFIG_DELETE_ENDPOINT = "/config/paths/delete/{name}"

HLS_MANIFEST_NAME = "index.m3u8"
WHEP_SUFFIX = "whep"

#: Source value used when the relay does not report one.
UNKNOWN_SOURCE = "unknown"

#: Cache key of the camera list snapshot.
CAMERA_LIST_CACHE_KEY = "cameras_list"
