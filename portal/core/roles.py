"""Role and permission naming conventions"""

from enum import Enum

CLUSTER_NAME_DEFAULT = "default"
NAMESPACE_APPLICATION = "application"

_JOINER = "+"


class RoleType(str, Enum):
    MASTER = "Master"
    MODIFY_NAMESPACE = "ModifyNamespace"
    RELEASE_NAMESPACE = "ReleaseNamespace"
    MODIFY_NAMESPACES_IN_CLUSTER = "ModifyNamespacesInCluster"
    RELEASE_NAMESPACES_IN_CLUSTER = "ReleaseNamespacesInCluster"


class PermissionType(str, Enum):
    # App level
    CREATE_NAMESPACE = "CreateNamespace"
    CREATE_CLUSTER = "CreateCluster"
    ASSIGN_ROLE = "AssignRole"
    MANAGE_APP_MASTER = "ManageAppMaster"

    # Namespace level
    MODIFY_NAMESPACE = "ModifyNamespace"
    RELEASE_NAMESPACE = "ReleaseNamespace"

    # Cluster level
    MODIFY_NAMESPACES_IN_CLUSTER = "ModifyNamespacesInCluster"
    RELEASE_NAMESPACES_IN_CLUSTER = "ReleaseNamespacesInCluster"


APP_MASTER_PERMISSIONS = (
    PermissionType.CREATE_CLUSTER,
    PermissionType.CREATE_NAMESPACE,
    PermissionType.ASSIGN_ROLE,
)


def build_app_master_role_name(app_id: str) -> str:
    return _JOINER.join((RoleType.MASTER.value, app_id))


def build_manage_app_master_role_name(app_id: str) -> str:
    return _JOINER.join((PermissionType.MANAGE_APP_MASTER.value, app_id))


def build_namespace_role_name(app_id: str, namespace_name: str, role_type: RoleType) -> str:
    return _JOINER.join((role_type.value, app_id, namespace_name))


def build_namespace_target_id(app_id: str, namespace_name: str) -> str:
    return _JOINER.join((app_id, namespace_name))


def build_cluster_role_name(app_id: str, env: str, cluster_name: str, role_type: RoleType) -> str:
    return _JOINER.join((role_type.value, app_id, env, cluster_name))


def build_cluster_target_id(app_id: str, env: str, cluster_name: str) -> str:
    return _JOINER.join((app_id, env, cluster_name))
