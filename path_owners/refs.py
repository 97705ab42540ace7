"""Git ref names."""

R_REFS = "refs/"
R_HEADS = "refs/heads/"
REFS_CONFIG = "refs/meta/config"

SYMBOLIC_REFS = {"HEAD", "FETCH_HEAD", "MERGE_HEAD"}

# refs maintained by the review host itself, never holding OWNERS files
HOST_INTERNAL_REF_PREFIXES = (
    "refs/changes/",
    "refs/sequences/",
    "refs/users/",
    "refs/groups/",
    "refs/cache-automerge/",
    "refs/draft-comments/",
    "refs/starred-changes/",
    "refs/external-ids",
    "refs/meta/",
)


def full_ref_name(ref: str) -> str:
    """``master`` -> ``refs/heads/master``, full and symbolic names unchanged."""
    if ref in SYMBOLIC_REFS or ref.startswith(R_REFS):
        return ref
    return R_HEADS + ref


def is_host_internal_ref(ref: str) -> bool:
    return ref.startswith(HOST_INTERNAL_REF_PREFIXES)
