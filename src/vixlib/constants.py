"""VIX constants: result codes, property ids and option flags.

Values mirror the VMware VIX API headers so that codes reported by the
automation surface can be matched directly.
"""

from typing import Final

# ============================================================================
# Result Codes
# ============================================================================

VIX_OK: Final[int] = 0
"""The single success code. Every other value is a failure."""

VIX_E_FAIL: Final[int] = 1
VIX_E_OUT_OF_MEMORY: Final[int] = 2
VIX_E_INVALID_ARG: Final[int] = 3
"""Also returned by snapshot GetParent for the VM's base state."""

VIX_E_FILE_NOT_FOUND: Final[int] = 4
VIX_E_OBJECT_IS_BUSY: Final[int] = 5
VIX_E_NOT_SUPPORTED: Final[int] = 6
VIX_E_FILE_ERROR: Final[int] = 7
VIX_E_DISK_FULL: Final[int] = 8
VIX_E_CANCELLED: Final[int] = 10
VIX_E_FILE_ALREADY_EXISTS: Final[int] = 12
VIX_E_FILE_ACCESS_ERROR: Final[int] = 13
VIX_E_OBJECT_NOT_FOUND: Final[int] = 25
VIX_E_HOST_NOT_CONNECTED: Final[int] = 26
VIX_E_AUTHENTICATION_FAIL: Final[int] = 35
VIX_E_INVALID_HANDLE: Final[int] = 1000
VIX_E_NOT_FOUND: Final[int] = 2000
VIX_E_TYPE_MISMATCH: Final[int] = 2001
VIX_E_TIMEOUT_WAITING_FOR_TOOLS: Final[int] = 3000
VIX_E_VM_NOT_RUNNING: Final[int] = 3006
VIX_E_VM_IS_RUNNING: Final[int] = 3007
VIX_E_TOOLS_NOT_RUNNING: Final[int] = 3016
VIX_E_GUEST_USER_PERMISSIONS: Final[int] = 3015
VIX_E_CANNOT_AUTHENTICATE_WITH_GUEST: Final[int] = 3024
VIX_E_VM_NOT_FOUND: Final[int] = 4000
VIX_E_UNRECOGNIZED_PROPERTY: Final[int] = 6000
"""Returned by GetNumProperties when a listing produced no rows at all."""

VIX_E_INVALID_PROPERTY_VALUE: Final[int] = 6001
VIX_E_SNAPSHOT_INVAL: Final[int] = 13000
VIX_E_SNAPSHOT_NOTFOUND: Final[int] = 13003
"""Returned by snapshot GetParent for a top-level snapshot."""

VIX_E_SNAPSHOT_EXISTS: Final[int] = 13004
VIX_E_NOT_A_FILE: Final[int] = 20001
VIX_E_NOT_A_DIRECTORY: Final[int] = 20002
VIX_E_NO_SUCH_PROCESS: Final[int] = 20003

# ============================================================================
# Guest OS Error Codes
# ============================================================================

GUEST_ERROR_FILE_NOT_FOUND: Final[int] = 2
"""Win32 ERROR_FILE_NOT_FOUND. ESX passes it through unchanged when a guest
directory is missing, so it shares a value with VIX_E_OUT_OF_MEMORY."""

# ============================================================================
# Property Ids
# ============================================================================

VIX_PROPERTY_VM_NUM_VCPUS: Final[int] = 101
VIX_PROPERTY_VM_VMX_PATHNAME: Final[int] = 103
VIX_PROPERTY_VM_MEMORY_SIZE: Final[int] = 106
VIX_PROPERTY_VM_POWER_STATE: Final[int] = 129
VIX_PROPERTY_VM_IS_RUNNING: Final[int] = 196

VIX_PROPERTY_JOB_RESULT_HANDLE: Final[int] = 3010
VIX_PROPERTY_JOB_RESULT_GUEST_OBJECT_EXISTS: Final[int] = 3011
VIX_PROPERTY_JOB_RESULT_GUEST_PROGRAM_EXIT_CODE: Final[int] = 3018
VIX_PROPERTY_JOB_RESULT_ITEM_NAME: Final[int] = 3035
VIX_PROPERTY_JOB_RESULT_PROCESS_ID: Final[int] = 3051
VIX_PROPERTY_JOB_RESULT_PROCESS_OWNER: Final[int] = 3052
VIX_PROPERTY_JOB_RESULT_PROCESS_COMMAND: Final[int] = 3053
VIX_PROPERTY_JOB_RESULT_FILE_FLAGS: Final[int] = 3054
VIX_PROPERTY_JOB_RESULT_PROCESS_START_TIME: Final[int] = 3055
VIX_PROPERTY_JOB_RESULT_VM_VARIABLE_STRING: Final[int] = 3056
VIX_PROPERTY_JOB_RESULT_PROCESS_BEING_DEBUGGED: Final[int] = 3057
VIX_PROPERTY_JOB_RESULT_SCREEN_IMAGE_DATA: Final[int] = 3059

VIX_PROPERTY_SNAPSHOT_DISPLAYNAME: Final[int] = 4200
VIX_PROPERTY_SNAPSHOT_DESCRIPTION: Final[int] = 4201
VIX_PROPERTY_SNAPSHOT_POWERSTATE: Final[int] = 4205

# ============================================================================
# Option Flags
# ============================================================================

VIX_VMPOWEROP_NORMAL: Final[int] = 0x0000
VIX_VMPOWEROP_FROM_GUEST: Final[int] = 0x0004
VIX_VMPOWEROP_LAUNCH_GUI: Final[int] = 0x0200

VIX_RUNPROGRAM_RETURN_IMMEDIATELY: Final[int] = 0x0001
VIX_RUNPROGRAM_ACTIVATE_WINDOW: Final[int] = 0x0002

VIX_SNAPSHOT_INCLUDE_MEMORY: Final[int] = 0x0002

VIX_FILE_ATTRIBUTES_DIRECTORY: Final[int] = 0x0001
"""Bit set in JOB_RESULT_FILE_FLAGS when a listed entry is a directory."""

VIX_CAPTURESCREENFORMAT_PNG: Final[int] = 0x01

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_LOCALE: Final[str] = "en-US"
"""Locale passed to the surface when resolving error text."""

DEFAULT_TIMEOUT_SECONDS: Final[int] = 60
"""Default timeout for every native operation."""

MAX_TIMEOUT_SECONDS: Final[int] = 3600
"""Upper bound accepted by the configuration models."""

SNAPSHOT_PATH_SEPARATOR: Final[str] = "/"
