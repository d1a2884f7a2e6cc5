from restopos.models.kv_entry import KVEntry
from restopos.models.app_setting import AppSetting
