from datetime import datetime
from typing import Optional
from pydantic import BaseModel

class NDBCWindData(BaseModel):
    """NDBC wind measurements."""
    speed: Optional[float] = None  # m/s
    direction: Optional[float] = None  # degrees clockwise from true N
    gust: Optional[float] = None  # m/s

class NDBCWaveData(BaseModel):
    """NDBC wave measurements."""
    height: Optional[float] = None  # meters
    period: Optional[float] = None  # dominant period, seconds
    average_period: Optional[float] = None  # seconds
    direction: Optional[float] = None  # degrees

class NDBCMetData(BaseModel):
    """NDBC meteorological measurements."""
    pressure: Optional[float] = None  # hPa
    air_temp: Optional[float] = None  # Celsius
    water_temp: Optional[float] = None  # Celsius
    dewpoint: Optional[float] = None  # Celsius
    visibility: Optional[float] = None  # nautical miles
    pressure_tendency: Optional[float] = None  # hPa
    tide: Optional[float] = None  # feet above/below MLLW

class NDBCDataAge(BaseModel):
    """Age of NDBC observation data."""
    minutes: float
    isStale: bool  # True if > 45 minutes old

class NDBCObservation(BaseModel):
    """First data row of an NDBC realtime report."""
    station_id: str
    time: Optional[datetime] = None
    wind: NDBCWindData = NDBCWindData()
    wave: NDBCWaveData = NDBCWaveData()
    met: NDBCMetData = NDBCMetData()
    data_age: Optional[NDBCDataAge] = None
