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

"""
pyddkf - Code double-difference Kalman filter positioning

Rover positioning relative to a master station from GPS code observations:
Bancroft initialisation, double-difference least squares and a Kalman
filter with constant position, velocity or acceleration dynamics.
"""

__version__ = "1.0.0"
__author__ = "PyINS Development Team"
__title__ = "pyddkf"
__description__ = "Code double-difference Kalman filter positioning"

from . import logger
from .core import *
from .coordinate import *
from .satellite import *
from .positioning import *
from .io import *
