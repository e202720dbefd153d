"""The built-in FetchTime tools."""

from fetchtime.tools.builtin.astronomical_info import GetAstronomicalInfoTool
from fetchtime.tools.builtin.convert_timezone import ConvertTimezoneTool
from fetchtime.tools.builtin.current_time import GetCurrentTimeTool
from fetchtime.tools.builtin.religious_calendar import GetReligiousCalendarTool

__all__ = [
    "ConvertTimezoneTool",
    "GetAstronomicalInfoTool",
    "GetCurrentTimeTool",
    "GetReligiousCalendarTool",
]
