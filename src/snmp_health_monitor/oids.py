"""Published SNMP object identifiers used by the health checks."""

# SNMPv2-MIB::sysDescr.0, used to tell device families apart.
SYSTEM_DESCRIPTION = "1.3.6.1.2.1.1.1.0"

# UCD-SNMP-MIB::laLoad (1, 5 and 15 minute rows) and HOST-RESOURCES hrProcessorLoad.
LOAD_TABLE = "1.3.6.1.4.1.2021.10.1.3"
LOAD_FIVE_MINUTE = "1.3.6.1.4.1.2021.10.1.3.2"
PROCESSOR_LOAD = "1.3.6.1.2.1.25.3.3.1.2"

# UCD-SNMP-MIB memory scalars, in kB.
MEMORY = {
    "total": "1.3.6.1.4.1.2021.4.5.0",
    "avail": "1.3.6.1.4.1.2021.4.6.0",
}
SWAP = {
    "total": "1.3.6.1.4.1.2021.4.3.0",
    "avail": "1.3.6.1.4.1.2021.4.4.0",
}

# HOST-RESOURCES-MIB::hrStorageTable, the layout Windows agents expose.
STORAGE_WINDOWS = {
    "type": "1.3.6.1.2.1.25.2.3.1.2",
    "path": "1.3.6.1.2.1.25.2.3.1.3",
    "units": "1.3.6.1.2.1.25.2.3.1.4",
    "total": "1.3.6.1.2.1.25.2.3.1.5",
    "used": "1.3.6.1.2.1.25.2.3.1.6",
}

# hrStorageType values counted as disks: fixed disks and removables (iscsi mounts).
WINDOWS_DEVICES = (
    "1.3.6.1.2.1.25.2.1.4",
    "1.3.6.1.2.1.25.2.1.7",
)

# UCD-SNMP-MIB::dskTable plus HOST-RESOURCES hrFSTable.
STORAGE_NET_SNMP = {
    "path": "1.3.6.1.4.1.2021.9.1.2",
    "percent": "1.3.6.1.4.1.2021.9.1.9",
    "type": "1.3.6.1.2.1.25.3.8.1.4",
    "access": "1.3.6.1.2.1.25.3.8.1.5",
}

# hrFSAccess values.
ACCESS_READWRITE = 1
ACCESS_READONLY = 2

# HOST-RESOURCES-MIB::hrSWRunTable columns.
PROCESS_NET_SNMP = {
    "path": "1.3.6.1.2.1.25.4.2.1.4",
    "args": "1.3.6.1.2.1.25.4.2.1.5",
}
PROCESS_WINDOWS = {
    "name": "1.3.6.1.2.1.25.4.2.1.2",
    "path": "1.3.6.1.2.1.25.4.2.1.4",
    "args": "1.3.6.1.2.1.25.4.2.1.5",
}

# UPS-MIB::upsBattery group.
UPS_BATTERY = {
    "battery_status": "1.3.6.1.2.1.33.1.2.1.0",  # 1 unknown, 2 normal, 3 low, 4 depleted
    "seconds_on_battery": "1.3.6.1.2.1.33.1.2.2.0",
    "est_minutes_remaining": "1.3.6.1.2.1.33.1.2.3.0",
    "est_charge_remaining": "1.3.6.1.2.1.33.1.2.4.0",  # percent
    "battery_voltage": "1.3.6.1.2.1.33.1.2.5.0",  # 0.1 V DC
    "battery_current": "1.3.6.1.2.1.33.1.2.6.0",  # 0.1 A DC
    "battery_temperature": "1.3.6.1.2.1.33.1.2.7.0",  # Celsius
}
