# -*- coding: utf-8 -*-
APP_NAME = "Evolução Eletrônica"
APP_VERSION = "3.0.0"
SCHEMA_VERSION = 1
