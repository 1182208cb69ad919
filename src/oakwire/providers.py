from oakwire._internal.providers import Lifetime, ProviderDependency, ProviderSpec

__all__ = ["Lifetime", "ProviderDependency", "ProviderSpec"]
