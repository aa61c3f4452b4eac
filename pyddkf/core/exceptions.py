# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exceptions raised by the positioning core"""

import numpy as np


class DegenerateGeometryError(np.linalg.LinAlgError):
    """Singular matrix caused by the satellite geometry.

    Raised by the Bancroft solver, the double-difference least squares and
    the Kalman gain computation. It aborts the current epoch only; retrying
    with the same satellites cannot succeed.
    """
