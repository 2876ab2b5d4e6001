from .host_resolver import HostResolverPort

__all__ = ["HostResolverPort"]
