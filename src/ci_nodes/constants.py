"""Application-wide constants.

Metadata keys shared between nodes, node type names, metric option names
and defaults used across the codebase.
"""

# Metadata keys exchanged between nodes
KEY_WORK_DIR = "workDir"  # Resolved local directory of the last clone/pull
KEY_REF = "ref"  # Default reference name when not configured
KEY_GIT_SSH_URL = "gitSshUrl"  # Default SSH remote URL
KEY_GIT_HTTP_URL = "gitHttpUrl"  # Default HTTP(S) remote URL
KEY_HASH = "hash"  # Resulting commit or tag identifier

# Node types
NODE_GIT_CLONE = "ci/gitClone"
NODE_GIT_COMMIT = "ci/gitCommit"
NODE_GIT_CREATE_TAG = "ci/gitCreateTag"
NODE_GIT_PUSH = "ci/gitPush"
NODE_GIT_LOG = "ci/gitLog"
NODE_PS = "ci/ps"

# Relation types reported to the rule context
RELATION_SUCCESS = "Success"
RELATION_FAILURE = "Failure"

# Log query time bounds
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_DATE_LENGTH = 10  # len("YYYY-MM-DD")
LOG_START_OF_DAY = " 00:00:00"
LOG_END_OF_DAY = " 23:59:59"
DEFAULT_LOG_LIMIT = 10

# Host metric options
OPTION_HOST_INFO = "host/info"
OPTION_CPU_INFO = "cpu/info"
OPTION_CPU_PERCENT = "cpu/percent"
OPTION_VIRTUAL_MEMORY = "mem/virtualMemory"
OPTION_SWAP_MEMORY = "mem/swapMemory"
OPTION_DISK_USAGE = "disk/usage"
OPTION_DISK_IO_COUNTERS = "disk/ioCounters"
OPTION_NET_IO_COUNTERS = "net/ioCounters"
OPTION_NET_INTERFACES = "net/interfaces"

ALL_METRIC_OPTIONS = (
    OPTION_HOST_INFO,
    OPTION_CPU_INFO,
    OPTION_CPU_PERCENT,
    OPTION_VIRTUAL_MEMORY,
    OPTION_SWAP_MEMORY,
    OPTION_DISK_USAGE,
    OPTION_DISK_IO_COUNTERS,
    OPTION_NET_IO_COUNTERS,
    OPTION_NET_INTERFACES,
)

CPU_PERCENT_INTERVAL_SECONDS = 1.0  # Sampling window for cpu/percent

# Git transport
GIT_SUFFIX = ".git"
DEFAULT_SSH_USER = "git"
ASKPASS_ENV_VAR = "CI_NODES_SSH_PASSPHRASE"  # Read by the ssh askpass helper
DEFAULT_TAGGER_NAME = "ci-nodes"  # Tagger when no signature is configured
DEFAULT_TAGGER_EMAIL = "ci-nodes@localhost"
DEFAULT_RETRY_ATTEMPTS = 1  # Transport attempts for clone/pull/push
DEFAULT_RETRY_MIN_WAIT = 2  # Minimum wait time between retries (seconds)
DEFAULT_RETRY_MAX_WAIT = 10  # Maximum wait time between retries (seconds)
