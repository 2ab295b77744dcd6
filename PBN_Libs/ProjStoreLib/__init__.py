"""
ProjStoreLib - Project file storage and management

This module handles persistence of Paint By Neon projects,
including serializing, validating, loading and saving project files.
"""

from PBN_Libs.ProjStoreLib.project_models import ProjectDocument, ProjectSettings
from PBN_Libs.ProjStoreLib.project_store import (
    generate_save_filename,
    document_to_dict,
    save_project,
    validate_project_data,
    document_from_dict,
    load_project,
    write_project_file,
    read_project_file,
)

__all__ = [
    "ProjectDocument",
    "ProjectSettings",
    "generate_save_filename",
    "document_to_dict",
    "save_project",
    "validate_project_data",
    "document_from_dict",
    "load_project",
    "write_project_file",
    "read_project_file",
]
