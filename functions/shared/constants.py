# Copyright 2025 Google LLC
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
# ==============================================================================

USERS_COLLECTION = "users"
DAILY_LOGS_COLLECTION = "dailyLogs"

# All calendar-day boundaries (day zero, rollover, dashboard windows) are
# computed in this zone.
TIME_ZONE = "Asia/Almaty"

CIGARETTES_PER_PACK = 20
PACK_PRICE = 500
CIGARETTE_PRICE = PACK_PRICE / CIGARETTES_PER_PACK
CURRENCY_SUFFIX = "₸"

DEFAULT_DISPLAY_NAME = "Anonymous"
INITIAL_ACHIEVEMENT = "first_step"

MAX_USER_ID_LENGTH = 128
