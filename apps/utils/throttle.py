from rest_framework.throttling import UserRateThrottle

class BurstRateThrottle(UserRateThrottle):
    """
    Short-window protection against scripted bursts.
    Scope: 'burst' (configured in settings)
    """
    scope = 'burst'

class SustainedRateThrottle(UserRateThrottle):
    """
    General API usage.
    """
    scope = 'sustained'
