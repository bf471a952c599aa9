from ticketbridge.core.mapping.resolver import MappingResolver, folder_of, is_path_match

__all__ = ["MappingResolver", "folder_of", "is_path_match"]
