"""
Recursive on-disk size of a directory tree.
"""
import os
import stat


def size(path: str) -> int:
    """
    Return the total size in bytes of all regular files under path.

    Symlinks are not followed. Errors while walking the tree propagate.
    """
    total = 0

    def _raise(err: OSError):
        raise err

    for root, _dirs, files in os.walk(path, onerror=_raise):
        for name in files:
            st = os.lstat(os.path.join(root, name))
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total
