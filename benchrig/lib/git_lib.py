'''
Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved. This notice is intended as a precaution against inadvertent publication and does not imply publication or any waiver of confidentiality.
The year included in the foregoing notice is the year of creation of the work.
All code contained here is Property of Advanced Micro Devices, Inc.
'''

import logging

from benchrig.lib.errors import AcquisitionError
from benchrig.lib.exec_lib import CommandError, run_cmd

log = logging.getLogger(__name__)


def git_recursive_clone_to_commit(dst, url, branch, commit):
    """
    Clone url with its submodules into dst and check out an exact commit.

    Parameters:
      dst (str): Destination directory; must not exist or be empty.
      url (str): Repository URL.
      branch (str): Branch to clone; must contain commit.
      commit (str): Full commit hash to check out.

    Raises:
      AcquisitionError: if the clone or the checkout fails.
    """
    log.info(f'Cloning {url} ({branch}) into {dst}')
    try:
        run_cmd(['git', 'clone', '--recursive', '--shallow-submodules', '-b', branch, url, dst])
    except CommandError as e:
        raise AcquisitionError(f'error cloning {url}: {e}') from e

    try:
        run_cmd(['git', '-C', dst, 'checkout', commit])
    except CommandError as e:
        raise AcquisitionError(f'error checking out {commit}: {e}') from e
